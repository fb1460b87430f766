from os.path import dirname

from hcontrib import Context
from hcontrib.progs import midl

c = Context(root=dirname(__file__))
outputs = c.join(c.root, "build")

c.mkdir(outputs)
midl.compile(
    c,
    "TempAtl.idl",
    tlb=c.join(outputs, "TempAtl.tlb"),
    header=c.join(outputs, "TempAtl.h"),
    iid=c.join(outputs, "TempAtl_i.c"),
    proxy=c.join(outputs, "TempAtl_p.c"),
    oi="cf",
    defines={"_DEBUG": None, "WIN32": 1},
    options=[midl.Option("/mktyplib203"), midl.Option("/error", "allocation")],
)

from os.path import dirname

from hcontrib import Context
from hcontrib.progs import vb6

c = Context(root=dirname(__file__))

vb6.make(c, "HelloWorld.vbg", outdir="build", error_file="build/vb6.log")

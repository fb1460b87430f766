from typing import Any

from os import getcwd
from os.path import exists, join, dirname
import subprocess

from invoke import task, Context

project_folder = dirname(__file__)

sources = (
    join(project_folder, "hcontrib"),
    join(project_folder, "tests"),
)

env_path = join(getcwd(), ".venv")
env_vars = [
    "PATH",
    "_OLD_VIRTUAL_PATH",
    "VIRTUAL_ENV",
    "VIRTUAL_ENV_PROMPT",
]


def extract_env_from_venv_activation_script(
    env_activation_script: str,
    environment_vars: list[str],
) -> dict[str, Any]:
    if not exists(env_activation_script):
        return {}

    process = subprocess.Popen(
        [env_activation_script, "&&", "set"], stdout=subprocess.PIPE
    )
    stdout, _ = process.communicate()
    output = stdout.decode("utf-8")

    env = {
        item[0].upper(): item[1]
        for item in (line.split("=", 1) for line in output.splitlines())
        if len(item) == 2 and item[0].upper() in environment_vars
    }

    return env


def _venv_env() -> dict[str, Any]:
    activate_bat = join(env_path, "Scripts", "activate.bat")
    return extract_env_from_venv_activation_script(activate_bat, env_vars)


@task
def configure(c: Context, dev=False, clean=False):
    with c.cd(getcwd()):
        pip_path_exe = join(env_path, "Scripts", "pip.exe")

        if clean and exists(pip_path_exe):
            c.run(f"rmdir /S /Q {env_path}")

        if not exists(pip_path_exe) or clean:
            c.run(f"python -m venv {env_path}")

        env = _venv_env()
        c.run("python -m pip install --upgrade pip", env=env)

        if dev:
            c.run(f"python -m pip install --editable {project_folder}[dev,test]", env=env)
        else:
            c.run(f"python -m pip install {project_folder}", env=env)


@task()
def test(c: Context, verbose=False) -> None:
    flags = "-v" if verbose else "-q"
    c.run(f"python -m pytest {flags} {join(project_folder, 'tests')}", env=_venv_env())


@task()
def format(c: Context) -> None:
    c.run(f"ruff format {' '.join(sources)}", env=_venv_env())


@task()
def lint(c: Context) -> None:
    env = _venv_env()

    c.run(f"mypy {join(project_folder, 'hcontrib')}", env=env)
    c.run(f"ruff check --respect-gitignore {' '.join(sources)}", env=env)
    c.run(f"ruff format --respect-gitignore --check --diff {' '.join(sources)}", env=env)

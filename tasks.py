# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create the virtual environment and install alamira with test extras."""
    ctx.run("uv venv")
    ctx.run('uv pip install -e ".[test,dev]"')


@task
def clean(ctx):
    """
    Remove files not under version control.
    Lists them first and asks before deleting anything.
    """
    ctx.run("git clean -nfdx")

    response = (
        input("Are you sure you want to remove all untracked files? (y/n) [n]: ")
        .strip()
        .lower()
    )
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """Run ruff and mypy over sources and tests."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=alamira --cov-report=term-missing", pty=True)


@task
def simulator(ctx, port=8080):
    """Start the display simulator on this machine."""
    ctx.run(f"alamira simulator --port {port}", pty=True)


@task
def build_package(ctx):
    """
    Build package using uv.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")

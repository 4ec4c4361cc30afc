# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv and install deckwatch with its dev extra."""
    ctx.run("uv sync --extra dev")


@task
def lint(ctx):
    """
    Static checks: ruff lint and format check on src and tests, mypy on src.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx, k=""):
    """
    Run tests with coverage information. Use -k to select tests by name.
    """
    select = f" -k {k!r}" if k else ""
    ctx.run(f"pytest --cov=deckwatch --cov-report=term-missing{select}", pty=True)


@task
def build_package(ctx):
    """
    Build package using uv.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")

"""Nox sessions."""

from __future__ import annotations

import os

import nox

nox.options.sessions = ["lint", "tests"]

PYTHON_ALL_VERSIONS = ["3.10", "3.11", "3.12", "3.13"]

if os.environ.get("CI", None):
    nox.options.error_on_missing_interpreters = True


@nox.session(reuse_venv=True)
def lint(session: nox.Session) -> None:
    """Run the linter."""
    session.install("pre-commit")
    session.run("pre-commit", "run", "--all-files", *session.posargs)


@nox.session(reuse_venv=True, python=PYTHON_ALL_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the test suite."""
    posargs = list(session.posargs)
    env = {"PIP_DISABLE_PIP_VERSION_CHECK": "1"}
    install_arg = "-e.[coverage]" if "--cov" in posargs else "-e.[test]"

    if "--cov" in posargs:
        posargs.append("--cov-config=pyproject.toml")

    session.install(install_arg)
    session.run("pytest", *posargs, env=env)


@nox.session(reuse_venv=True)
def min_qiskit_version(session: nox.Session) -> None:
    """Run the test suite against the oldest supported Qiskit release."""
    session.install("-e.[test]", "qiskit==1.0.0")
    session.run("pytest", *session.posargs)

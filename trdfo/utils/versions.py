import os
import platform
import sys
from importlib.metadata import PackageNotFoundError, version


def _get_sys_info():
    """
    Get the interpreter and platform information.
    """
    return {
        "python": sys.version.replace(os.linesep, " "),
        "executable": sys.executable,
        "machine": platform.platform(),
    }


def _get_deps_info(extras=("install", "tests")):
    """
    Get the installed versions of trdfo and of its declared dependencies.

    Parameters
    ----------
    extras : tuple of str, optional
        Tags of the dependencies to report, as declared in
        ``trdfo._min_dependencies``.

    Returns
    -------
    dict
        Installed version of each package, or None if it is not installed.
    """
    from .._min_dependencies import dependent_pkgs

    deps = ["setuptools", "pip", "trdfo"]
    for pkg, (_, tags) in dependent_pkgs.items():
        if any(tag in extras for tag in tags.split(", ")):
            deps.append(pkg)
    deps_info = {}
    for pkg in deps:
        try:
            deps_info[pkg] = version(pkg)
        except PackageNotFoundError:
            deps_info[pkg] = None
    return deps_info


def _print_section(title, info):
    print(title)
    print("-" * len(title))
    width = max(map(len, info)) + 1
    for key, value in info.items():
        print(f"{key:>{width}}: {value}")


def show_versions():
    """
    Print the platform information and the versions of the dependencies.

    This information is useful when reporting a bug.
    """
    _print_section("System settings", _get_sys_info())
    print()
    _print_section("Python dependencies", dict(sorted(_get_deps_info().items())))

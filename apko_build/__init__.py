"""apko-build: image configuration validation and SBOM generation for built layers."""


def _get_version() -> str:
    """Get package version with fallback mechanisms."""
    # Method 1: installed distribution metadata
    try:
        from importlib.metadata import version

        return version("apko-build")
    except Exception:
        pass

    # Method 2: read pyproject.toml directly (source checkout)
    try:
        from pathlib import Path

        import tomllib

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)
            return pyproject_data.get("project", {}).get("version", "unknown")
    except Exception:
        pass

    return "unknown"


__version__ = _get_version()

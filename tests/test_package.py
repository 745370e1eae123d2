"""Tests for mediaforge package."""


def test_package_imports():
    """Test that the package can be imported successfully."""
    import mediaforge

    assert mediaforge is not None


def test_package_version():
    """Test that the package has a version string."""
    from mediaforge import __version__

    assert __version__ == "0.1.0"


def test_cli_entry_point_imports():
    """Test that the console script target resolves."""
    from mediaforge.cli import main

    assert main.name == "main"

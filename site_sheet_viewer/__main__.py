"""Entry point for the site sheet viewer GUI."""

from .core import run


def main() -> None:
    """Run the site sheet viewer."""
    run()


if __name__ == "__main__":  # pragma: no cover
    main()

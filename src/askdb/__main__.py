"""askdb CLI bootstrap."""

from askdb.cli import app

if __name__ == "__main__":
    app()

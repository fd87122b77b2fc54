"""Main entry point for running crossref-client as a module."""

from crossref_client.cli import main

if __name__ == "__main__":
    main()

#!/usr/bin/env python3
# ABOUTME: Command-line client for DeepLX-compatible translation servers.
# ABOUTME: Sends text to a /translate endpoint and prints the translation.

from deeplx_cli.cli import main


if __name__ == "__main__":
    main()

"""
__main__.py

This file adds support for running earthwall as a python module instead of invoking the "earthwall"
command line entrypoint, which is handy for schedulers that only know about the interpreter:

    python -m earthwall --work-dir ~/earthwall
"""


from earthwall.cli import main


if __name__ == "__main__":
    main()

"""
Storyteller entry point — ``python -m storyteller <command>``.

Typical usage::

    python -m storyteller beautify stories.json -o beautified.json
    python -m storyteller analyze transcript.txt --title "Moving Home"
    python -m storyteller clean transcript.txt --narrative

Run ``python -m storyteller --help`` for the full command list.
"""

from storyteller.cli import cli

if __name__ == "__main__":
    cli()

"""
Run the rollup-stream CLI as a module:

    python -m cli bundle src/main.js -o dist/bundle.js
"""

from . import cli

if __name__ == '__main__':
    cli()

"""Module entrypoint."""

from bddgen_tools.cli import main

raise SystemExit(main())

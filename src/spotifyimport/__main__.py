"""Allow `python -m spotifyimport`."""

from spotifyimport.cli import main

raise SystemExit(main())

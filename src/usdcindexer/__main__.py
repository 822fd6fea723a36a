from usdcindexer.cli import main

raise SystemExit(main())

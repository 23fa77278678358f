from cachematrix.app.cli import main

raise SystemExit(main())

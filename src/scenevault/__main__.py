from scenevault.cli.main import main

raise SystemExit(main())

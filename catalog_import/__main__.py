from catalog_import.cli import main

raise SystemExit(main())

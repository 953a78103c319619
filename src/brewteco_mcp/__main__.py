from brewteco_mcp.cli import main

raise SystemExit(main())

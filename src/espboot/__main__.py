from espboot.cli import main

raise SystemExit(main())

from .stdio import main

raise SystemExit(main())

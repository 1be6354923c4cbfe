from politecrawler.cli import main

raise SystemExit(main())

from slideshow.cli import main

raise SystemExit(main())

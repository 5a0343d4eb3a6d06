"""Allow ``python -m kafkaprobe``."""

from kafkaprobe.diagnostics.run import main

raise SystemExit(main())

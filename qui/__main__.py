from qui.main import run

raise SystemExit(run())

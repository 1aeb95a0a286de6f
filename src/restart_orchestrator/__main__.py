from restart_orchestrator.cli import main

main()

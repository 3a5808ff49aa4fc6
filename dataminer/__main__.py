from dataminer.main import main

main()

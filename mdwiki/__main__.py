from .watch_wiki import main

if __name__ == "__main__":
    main()

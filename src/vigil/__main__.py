"""vigilのコマンドラインエントリポイント。"""

if __name__ == "__main__":
    from vigil.cli import main

    main()

from app.crawler.run import _cli_entrypoint

if __name__ == "__main__":
    # Configuration comes from SEI_* environment variables; see app/crawler/config.py.
    raise SystemExit(_cli_entrypoint())

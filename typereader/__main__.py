import uvicorn

from typereader import config


def main() -> None:
    uvicorn.run("typereader.main:app", host="127.0.0.1", port=8000, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()

"""CLI argument parsing and uvicorn entry point for a standalone scripted stub."""

import logging


def main(argv=None):
    import argparse
    import uvicorn

    from ..config import load_config
    from ..exchange import ScriptedExchangeDriver, script_tool_exchange
    from .stub import create_stub_app

    parser = argparse.ArgumentParser(description="toolreplay scripted chat-completions stub")
    parser.add_argument("--config", help="YAML harness config")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--credential", default=None, help="Bearer credential requests must carry")
    parser.add_argument("--tool-calls", type=int, default=1, help="Function-call turns before the answer")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    config = load_config(args.config, host=args.host, port=args.port, api_key=args.credential)

    driver = ScriptedExchangeDriver()
    script_tool_exchange(
        driver,
        tool_calls=args.tool_calls,
        credential=config.api_key,
        path=f"{config.base_path}/chat/completions",
    )

    uvicorn.run(create_stub_app(driver), host=config.host, port=config.port)


if __name__ == "__main__":
    main()

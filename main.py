import argparse
import sys

import uvicorn

from voicectl import logui
from voicectl.client import CommandClient, is_port_open
from voicectl.config import HOST, PORT
from voicectl.logui import error, info


def send(text: str, host: str, port: int) -> int:
    target = "127.0.0.1" if host in ("0.0.0.0", "") else host
    if not is_port_open(target, port):
        error(f"No server listening on {target}:{port}")
        return 1
    result = CommandClient(f"http://{target}:{port}").execute(text)
    if result is None:
        return 1
    print(result["response"], flush=True)
    return 0 if result.get("status") == "success" else 2


def main(argv=None):
    parser = argparse.ArgumentParser(prog="voicectl", description="Voice/text command server")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--send", metavar="TEXT", help="send one typed command to a running server")
    parser.add_argument("--log-level", choices=sorted(logui.LEVELS), help="override VOICECTL_LOG")
    args = parser.parse_args(argv)

    if args.log_level:
        logui.set_level(args.log_level)

    if args.send is not None:
        return send(args.send, args.host, args.port)

    info(f"Server running on http://localhost:{args.port}")
    try:
        uvicorn.run("voicectl.api:app", host=args.host, port=args.port, log_level="warning")
    except Exception as e:
        error(f"Failed to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

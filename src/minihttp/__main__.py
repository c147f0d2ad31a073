"""
Demo web application: ``python -m minihttp``.

Serves ./webroot plus a few example services:

    GET  /world                       hello world!
    GET  /hello?name=Ada&age=36       hello Ada you are 36 years old
    GET  /pi                          3.141592653589793
    POST /hellopost?name=Ada          hello Ada this is a simple post method example

Every service is also reachable under /app, e.g. /app/hello?name=Ada.
"""

import math
import sys

from . import app


def register_demo_services() -> None:
    app.staticfiles("/webroot")

    app.get("/world", lambda request, response: "hello world!")

    @app.get("/hello")
    def hello(request, response):
        name = request.get_value("name")
        age = request.get_value("age")
        return f"hello {name} you are {age} years old"

    app.get("/pi", lambda request, response: str(math.pi))

    @app.post("/hellopost")
    def hellopost(request, response):
        return f"hello {request.get_value('name')} this is a simple post method example"


def main(argv=None) -> int:
    register_demo_services()

    try:
        app.start(argv)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

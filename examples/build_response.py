import gzip
import time

import click
from maplehttp import Cookies, Response, Stream


def dump(label: str, response: Response, color: str) -> None:
    click.secho(label, fg=color, bold=True)
    click.echo(response.status_line())
    for line in response.header_lines():
        click.echo(line)
    click.echo()
    click.echo(str(response.get_body()))
    click.echo()


def main() -> None:
    body = Stream(Stream.TEMP)
    body.write(gzip.compress(b'{"hello": "world"}'))
    response = Response(
        body,
        {"Content-Type": "application/json", "Content-Encoding": "gzip"},
    ).set_cache(int(time.time()), 3600)
    dump("Decoded JSON response", response.with_decoded_body(), "green")

    cookies = Cookies().set_same_site("strict")
    cookies.set("session", "abc123", expires=int(time.time()) + 86400)
    redirect = Response().redirect("/login")
    for value in cookies.header_values():
        redirect = redirect.with_added_header("Set-Cookie", [value])
    dump("Redirect with cookie", redirect.clear_cache(), "yellow")


if __name__ == "__main__":
    main()

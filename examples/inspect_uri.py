import click
from maplehttp import InvalidArgumentError, Uri


def show(label: str, value, color: str = "cyan") -> None:
    click.secho(f"{label:>10}: ", fg=color, nl=False)
    click.echo(value if value not in (None, "") else "-")


@click.command()
@click.argument("uri")
@click.option("--port", type=int, default=None, help="Replace the port.")
@click.option("--path", default=None, help="Replace the path.")
def main(uri: str, port: int | None, path: str | None) -> None:
    try:
        parsed = Uri(uri)
    except InvalidArgumentError as exc:
        click.secho(f"Invalid URI: {exc}", fg="red")
        raise SystemExit(1)

    if port is not None:
        parsed = parsed.with_port(port)
    if path is not None:
        parsed = parsed.with_path(path)

    show("scheme", parsed.get_scheme())
    show("userinfo", parsed.get_user_info())
    show("host", parsed.get_host())
    show("port", parsed.get_port())
    show("authority", parsed.get_authority())
    show("path", parsed.get_path())
    show("query", parsed.get_query())
    show("fragment", parsed.get_fragment())
    show("uri", str(parsed), "green")


if __name__ == "__main__":
    main()

import json
from pathlib import Path

import click

from acct_core.protocol import DEFAULT_NAMESPACE

from .accounts import AccountsCoder
from .errors import AccountCoderError
from .idl import load_idl
from .layout import json_default

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

idl_arg = click.argument("idl", type=click.Path(exists=True, dir_okay=False, path_type=Path))
namespace_opt = click.option("--namespace", default=DEFAULT_NAMESPACE, show_default=True, help="Discriminator namespace")


def _echo(obj) -> None:
    click.echo(json.dumps(obj, default=json_default, **CANONICAL_JSON_KW))


def _coder(idl: Path, namespace: str) -> AccountsCoder:
    try:
        return AccountsCoder(load_idl(idl), namespace=namespace)
    except (AccountCoderError, KeyError, ValueError) as e:
        _fatal(e)


def _fatal(e: Exception):
    # Fail closed, with a single-line reason.
    click.echo(f"FATAL: {e}")
    raise SystemExit(1)


@click.group()
def main():
    pass


@main.command("discriminator")
@idl_arg
@click.argument("name")
@namespace_opt
def discriminator_cmd(idl: Path, name: str, namespace: str):
    coder = _coder(idl, namespace)
    try:
        disc = coder.account_discriminator(name)
    except AccountCoderError as e:
        _fatal(e)
    _echo({"name": name, "discriminator": disc.hex(), "offset": coder.header.discriminator_offset()})


@main.command("encode")
@idl_arg
@click.argument("name")
@click.argument("value")
@namespace_opt
def encode_cmd(idl: Path, name: str, value: str, namespace: str):
    coder = _coder(idl, namespace)
    try:
        data = coder.encode(name, json.loads(value))
    except (AccountCoderError, json.JSONDecodeError) as e:
        _fatal(e)
    click.echo(data.hex())


@main.command("decode")
@idl_arg
@click.argument("name")
@click.argument("data")
@click.option("--unchecked", is_flag=True, help="Skip the discriminator check")
@namespace_opt
def decode_cmd(idl: Path, name: str, data: str, unchecked: bool, namespace: str):
    coder = _coder(idl, namespace)
    try:
        raw = bytes.fromhex(data)
        value = coder.decode_unchecked(name, raw) if unchecked else coder.decode(name, raw)
    except (AccountCoderError, ValueError) as e:
        _fatal(e)
    _echo(value)


@main.command("filter")
@idl_arg
@click.argument("name")
@namespace_opt
def filter_cmd(idl: Path, name: str, namespace: str):
    coder = _coder(idl, namespace)
    try:
        _echo(coder.memcmp(name))
    except AccountCoderError as e:
        _fatal(e)


@main.command("size")
@idl_arg
@click.argument("name")
def size_cmd(idl: Path, name: str):
    coder = _coder(idl, DEFAULT_NAMESPACE)
    try:
        click.echo(str(coder.size(name)))
    except AccountCoderError as e:
        _fatal(e)


if __name__ == "__main__":
    main()

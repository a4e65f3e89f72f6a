"""Interactive command-line client for the items service."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Sequence
from time import perf_counter_ns
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .console import Console, Method, describe_status, format_duration
from .models import CreateItemPayload, Item

BASE_URL = "http://127.0.0.1:3000/api"

_ITEM_LIST = TypeAdapter(list[Item])

_TEXT_FIELDS = {"name", "description"}
_FIELD_ALIASES = {
    "name": "name",
    "n": "name",
    "description": "description",
    "d": "description",
    "count": "count",
    "c": "count",
    "height": "height",
    "h": "height",
    "weight": "weight",
    "w": "weight",
}
_FIELD_DONE = {"done", "quit", "q"}


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _success(console: Console) -> str:
    return console.style("✅ Success!", "green")


def _error(console: Console) -> str:
    return console.style("❌ Error", "red")


def _report_status(console: Console, response: httpx.Response, elapsed: int) -> None:
    console.echo(
        f"{console.style('Received status:', None, 'dark')} "
        f"{describe_status(response.status_code)} (took {format_duration(elapsed)})"
    )


def _sending(console: Console, method: str, color: str, url: str) -> None:
    console.echo(f"{console.style('Sending', None, 'dark')} {console.style(method, color)} {url}...")


def _request_failed(console: Console, error: Exception) -> None:
    console.echo_error(f"{console.style('Request failed', 'red')}: {error}")


def _timed(send: Callable[[], httpx.Response]) -> tuple[httpx.Response, int]:
    start = perf_counter_ns()
    response = send()
    return response, perf_counter_ns() - start


def handle_get(client: httpx.Client, console: Console, base_url: str) -> None:
    """Fetch a path below the API root and show what came back."""
    console.echo(console.style("\n--- GET Request ---", "blue", "bold"))
    path = console.read_line("Enter path (e.g., /items or /items/1)")
    url = f"{base_url}{path}"
    _sending(console, "GET", "blue", url)
    try:
        response, elapsed = _timed(lambda: client.get(url))
    except httpx.HTTPError as exc:
        _request_failed(console, exc)
        return
    _report_status(console, response, elapsed)

    if not response.is_success:
        console.echo_error(f"{_error(console)}: {response.text}")
        return
    text = response.text
    if not text:
        console.echo(console.style("<empty response>", None, "dark"))
        return
    try:
        items = _ITEM_LIST.validate_json(text)
    except ValidationError:
        pass
    else:
        console.echo(f"{_success(console)} Items received:")
        console.echo(_pretty([item.model_dump() for item in items]))
        return
    try:
        item = Item.model_validate_json(text)
    except ValidationError:
        console.echo(f"{_success(console)} Response body:")
        console.echo(text)
    else:
        console.echo(f"{_success(console)} Item received:")
        console.echo(_pretty(item.model_dump()))


def _send_item(
    console: Console,
    send: Callable[[], httpx.Response],
    accepted: Callable[[httpx.Response], bool],
    verb: str,
) -> None:
    try:
        response, elapsed = _timed(send)
    except httpx.HTTPError as exc:
        _request_failed(console, exc)
        return
    _report_status(console, response, elapsed)
    if not accepted(response):
        console.echo_error(f"{_error(console)}: {response.text}")
        return
    try:
        item = Item.model_validate_json(response.content)
    except ValidationError:
        console.echo(
            f"{_success(console)} Item {verb}, but response body couldn't be parsed as Item."
        )
    else:
        console.echo(f"{_success(console)} Item {verb}:")
        console.echo(_pretty(item.model_dump()))


def handle_post(client: httpx.Client, console: Console, base_url: str) -> None:
    """Ask for a new item's fields and create it."""
    console.echo(console.style("\n--- POST Request ---", "green", "bold"))
    console.echo(console.style("Enter details for the new item:", "green"))
    name = console.read_line("Name")
    description = console.read_line("Description")
    count = console.read_uint("Count")
    height = console.read_uint("Height")
    weight = console.read_uint("Weight")
    payload = CreateItemPayload(
        name=name, description=description, count=count, height=height, weight=weight
    )

    console.echo("\n" + console.style("Payload to be sent:", "yellow"))
    console.echo(_pretty(payload.model_dump()))
    if not console.read_confirmation("Confirm sending this POST request?"):
        console.echo(console.style("POST request cancelled.", "yellow"))
        return

    url = f"{base_url}/items"
    _sending(console, "POST", "green", url)
    _send_item(
        console,
        lambda: client.post(url, json=payload.model_dump()),
        lambda response: response.status_code == 201,
        "created",
    )


def handle_put(client: httpx.Client, console: Console, base_url: str) -> None:
    """Fetch an item, let the user change fields, and store the result."""
    console.echo(console.style("\n--- PUT Request ---", "yellow", "bold"))
    item_id = console.read_uint("Enter ID of item to update")
    url = f"{base_url}/items/{item_id}"

    console.echo(f"{console.style('Step 1:', None, 'dark')} Fetching current item data...")
    current = client.get(url)
    if not current.is_success:
        console.echo_error(
            f"{_error(console)}: Could not fetch item {item_id}. "
            f"Status: {describe_status(current.status_code)}. Body: {current.text}"
        )
        return
    try:
        item = Item.model_validate_json(current.content)
    except ValidationError as exc:
        console.echo_error(f"{_error(console)}: Failed to parse current item data: {exc}")
        return

    console.echo(f"{console.style('Step 2:', None, 'dark')} Current item data:")
    console.echo(_pretty(item.model_dump()))
    console.echo(
        console.style("Step 3: Select fields to update (enter field name or 'done'):", None, "dark")
    )

    fields = item.model_dump(exclude={"id"})
    updated = False
    while True:
        choice = console.read_line(
            "Field (name, description, count, height, weight, done)"
        ).lower()
        if choice in _FIELD_DONE:
            break
        field = _FIELD_ALIASES.get(choice)
        if field is None:
            console.echo_error(console.style("Invalid field name.", "red"))
            continue
        prompt = f"New {field}"
        fields[field] = console.read_line(prompt) if field in _TEXT_FIELDS else console.read_uint(prompt)
        updated = True

    if not updated:
        console.echo(console.style("No fields were modified. PUT request cancelled.", "yellow"))
        return

    payload = CreateItemPayload(**fields)
    console.echo("\n" + console.style("Updated payload to be sent:", "yellow"))
    console.echo(_pretty(payload.model_dump()))
    if not console.read_confirmation("Confirm sending this PUT request?"):
        console.echo(console.style("PUT request cancelled.", "yellow"))
        return

    _sending(console, "PUT", "yellow", url)
    _send_item(
        console,
        lambda: client.put(url, json=payload.model_dump()),
        lambda response: response.is_success,
        "updated",
    )


def handle_delete(client: httpx.Client, console: Console, base_url: str) -> None:
    """Delete an item after confirmation."""
    console.echo(console.style("\n--- DELETE Request ---", "red", "bold"))
    item_id = console.read_uint("Enter ID of item to delete")
    url = f"{base_url}/items/{item_id}"
    if not console.read_confirmation(f"Confirm deleting item {item_id}?"):
        console.echo(console.style("DELETE request cancelled.", "yellow"))
        return

    _sending(console, "DELETE", "red", url)
    try:
        response, elapsed = _timed(lambda: client.delete(url))
    except httpx.HTTPError as exc:
        _request_failed(console, exc)
        return
    _report_status(console, response, elapsed)

    if response.status_code == 204:
        console.echo(f"{_success(console)} Item {item_id} deleted successfully.")
    elif response.status_code == 404:
        console.echo_error(f"{_error(console)}: Item {item_id} not found.")
    else:
        console.echo_error(
            f"{_error(console)}: Status {describe_status(response.status_code)}. {response.text}"
        )


_HANDLERS: dict[Method, Callable[[httpx.Client, Console, str], None]] = {
    Method.GET: handle_get,
    Method.POST: handle_post,
    Method.PUT: handle_put,
    Method.DELETE: handle_delete,
}


def run(client: httpx.Client, console: Console, base_url: str = BASE_URL) -> None:
    """Serve actions chosen by the user until they ask to leave."""
    console.echo(console.style("Client Started", "cyan", "bold"))
    console.echo(f"{console.style('Base URL:', None, 'dark')} {base_url}")
    while True:
        method = console.prompt_for_method()
        if method is None:
            console.echo(console.style("Exiting client.", "yellow"))
            return
        _HANDLERS[method](client, console, base_url)


def main(argv: Sequence[str] | None = None) -> None:
    """Start an interactive session against the local items service."""
    argparse.ArgumentParser(
        prog="redis-client", description="Interactive client for the items service."
    ).parse_args(argv)
    console = Console()
    try:
        with httpx.Client() as client:
            run(client, console, BASE_URL)
    except (EOFError, OSError, httpx.HTTPError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
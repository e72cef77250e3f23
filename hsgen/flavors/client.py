"""httpx client flavor: one client method per link.

GET links send their payload as query parameters, url-encoded links as a
form body, multipart links as form fields plus files, everything else as
JSON. Non-success responses raise ClientError with the server's message.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from ..codegen import SYSTEM, Artifact, render_template
from ..hyperschema import Link
from ..naming import looks_like_struct, render_imports, snake_case
from ..parser import FORM_ENCODING, ParseState, Result
from .base import Flavor
from .server import struct_types


@dataclass(frozen=True)
class ClientMethod:
    function: str
    http_method: str
    path: str
    encoding: str | None = None
    payload_type: str | None = None
    response_type: str | None = None
    response_struct: bool = False
    file_fields: tuple[str, ...] = ()

    @property
    def return_type(self) -> str:
        if self.response_type is None:
            return "None"
        if self.response_struct:
            return f"{self.response_type} | None"
        return self.response_type


def build_client_method(state: ParseState, name: str, link: Link) -> ClientMethod:
    payload_type = state.request_payload_type.get(name)
    encoding = None
    if payload_type is not None:
        if link.http_method == "get":
            encoding = "params"
        elif name in state.multipart_fields:
            encoding = "multipart"
        elif link.enc_type == FORM_ENCODING:
            encoding = "data"
        else:
            encoding = "json"

    response_type = state.response_payload_type.get(name)
    return ClientMethod(
        function=snake_case(name),
        http_method=link.http_method.upper(),
        path=link.path,
        encoding=encoding,
        payload_type=payload_type,
        response_type=response_type,
        response_struct=response_type is not None and looks_like_struct(response_type),
        file_fields=state.multipart_fields.get(name, ()),
    )


class ClientFlavor(Flavor):
    name = "client"

    def build_method(self, state: ParseState, name: str, link: Link) -> str:
        return render_template("client_method.py.j2", m=build_client_method(state, name, link))

    def artifacts(self, result: Result) -> list[Artifact]:
        path = Path(self.options.app_pkg) / f"{self.options.client_pkg}.py"
        return [Artifact("client", path, SYSTEM, lambda out: self.render_client(result, out))]

    def render_client(self, result: Result, out: TextIO) -> None:
        local = []
        models = struct_types(result.response_payload_type)
        if models:
            local.append(f"from .models import {', '.join(models)}")

        out.write(
            render_template(
                "client.py.j2",
                app_pkg=self.options.app_pkg,
                imports=render_imports(
                    ["from typing import Any"], ["httpx", *self.imports(result, "client")], local
                ),
                method_names=result.method_names,
                methods=result.methods,
            )
        )

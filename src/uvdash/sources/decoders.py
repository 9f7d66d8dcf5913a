from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Any
import codecs
import json


class Decoder(ABC):
    @abstractmethod
    def decode(self, chunks: Iterable[bytes]) -> Iterator[Any]:
        pass


class JsonDecoder(Decoder):
    """Decode a whole JSON response body and yield its rows.

    A top-level list yields one row per item; any other value is a single row,
    unless ``require_array`` is set, in which case it is rejected (the EPA
    service answers bad requests with an error object).
    """

    def __init__(
        self,
        *,
        encoding: str = "utf-8",
        require_array: bool = False,
    ):
        self.encoding = encoding
        self.require_array = require_array

    def text(self, chunks: Iterable[bytes]) -> str:
        # Incremental decoding keeps multi-byte characters split across chunks intact.
        return "".join(codecs.iterdecode(chunks, self.encoding))

    def load(self, chunks: Iterable[bytes]) -> Any:
        body = self.text(chunks)
        if not body.strip():
            raise ValueError("empty json document")
        return json.loads(body)

    def decode(self, chunks: Iterable[bytes]) -> Iterator[Any]:
        data = self.load(chunks)
        if isinstance(data, list):
            yield from data
        elif self.require_array:
            raise ValueError(f"expected a json array, got: {json.dumps(data)[:120]}")
        else:
            yield data

#!/usr/bin/env python
"""
This script stores binary payloads inside XML documents as base64 text.

Save files and configuration documents are kept as text (XML), but some of the data
that goes into them is raw bytes. Raw bytes are not safe inside an XML document, so each
payload is encoded and kept in its own element:

    <payload name="thumbnail" size="5">D4a+//A=</payload>

The size attribute is the decoded byte count. It is checked again on extraction.

Supported commands:

1. encode / decode / validate

    payload_utils.py encode -i data.bin -o data.b64
    payload_utils.py decode -i data.b64 -o data.bin
    payload_utils.py validate -i data.b64

2. embed / extract / list

    payload_utils.py embed -i doc.xml -p data.bin -n thumbnail -o out.xml.gz
    payload_utils.py extract -i out.xml.gz -n thumbnail -o data.bin
    payload_utils.py list -i out.xml.gz

    Notes:
    - files ending in .gz or .xz are (de)compressed on the fly
    - embedding a name that already exists replaces the old payload

To understand this script, start at process_embed() and process_extract().
"""

import argparse
import sys

from lxml import etree as ET
from lxml.etree import _Element as Element

from base64_codec import decode_base64, encode_base64, is_valid_base64
from common_funcs import read_file_bytes, write_output, xprint

# Element used to hold a single encoded payload
payload_tag = "payload"
name_attrib = "name"
size_attrib = "size"

# Should be added at the top
first_line = b"""<?xml version="1.0" encoding="UTF-8"?>\n"""

perform_decode_check = True


def find_payload_elem(root: Element, name: str) -> Element | None:
    for elem in root.iter(payload_tag):
        if elem.get(name_attrib) == name:
            return elem
    return None


def embed_payload(root: Element, name: str, data: bytes) -> Element:
    """
    Encode data and store it under root, replacing a payload with the same name.
    """
    text = encode_base64(data).decode("ascii")

    new_elem = ET.Element(payload_tag)
    new_elem.set(name_attrib, name)
    new_elem.set(size_attrib, str(len(data)))
    new_elem.text = text

    old_elem = find_payload_elem(root, name)
    if old_elem is not None and old_elem.getparent() is not None:
        new_elem.tail = old_elem.tail
        old_elem.getparent().replace(old_elem, new_elem)
    else:
        root.append(new_elem)

    if perform_decode_check:
        # Ignore this part. Only for checks.
        if is_valid_base64(text) != len(data):
            raise RuntimeError(f"Encoded size mismatch for payload '{name}'")
        if decode_base64(text) != data:
            raise RuntimeError(f"Encode/decode mismatch for payload '{name}'")

    return new_elem


def payload_text(elem: Element) -> str:
    if elem.text is None:
        return ""
    return elem.text.strip()


def extract_payload(root: Element, name: str) -> bytes:
    """
    Do the opposite of embed_payload
    """
    elem = find_payload_elem(root, name)
    if elem is None:
        raise KeyError(f"No payload named '{name}'")

    text = payload_text(elem)
    decoded_size = is_valid_base64(text)
    if decoded_size == 0 and text:
        raise RuntimeError(f"Payload '{name}' is not valid base64")

    expected = elem.get(size_attrib)
    if expected is not None and int(expected) != decoded_size:
        raise RuntimeError(
            f"Size mismatch for payload '{name}': " f"{decoded_size} != {expected}"
        )

    return decode_base64(text)


def list_payloads(root: Element) -> list[tuple[str, int]]:
    result = []
    for elem in root.iter(payload_tag):
        result.append((elem.get(name_attrib, ""), is_valid_base64(payload_text(elem))))
    return result


def remove_payload(root: Element, name: str) -> bool:
    elem = find_payload_elem(root, name)
    if elem is None or elem.getparent() is None:
        return False
    elem.getparent().remove(elem)
    return True


def read_document(fname: str) -> Element:
    return ET.fromstring(read_file_bytes(fname))


def write_document(root: Element, outfile: str) -> None:
    write_output(first_line + ET.tostring(root, encoding="UTF-8"), outfile)


def process_embed(docfile: str, datafile: str, name: str, outfile: str) -> None:
    root = read_document(docfile)
    data = read_file_bytes(datafile)
    embed_payload(root, name, data)
    write_document(root, outfile)
    xprint(f"Embedded {len(data)} bytes as '{name}'")


def process_extract(docfile: str, name: str, outfile: str) -> None:
    root = read_document(docfile)
    data = extract_payload(root, name)
    write_output(data, outfile)
    xprint(f"Extracted {len(data)} bytes from '{name}'")


def handle_encode(args: argparse.Namespace) -> None:
    data = read_file_bytes(args.input)
    write_output(encode_base64(data) + b"\n", args.output)
    xprint("Done")


def handle_decode(args: argparse.Namespace) -> None:
    text = read_file_bytes(args.input).strip()
    write_output(decode_base64(text), args.output)
    xprint("Done")


def handle_validate(args: argparse.Namespace) -> None:
    text = read_file_bytes(args.input).strip()
    decoded_size = is_valid_base64(text)
    if decoded_size == 0 and text:
        xprint(f"Invalid base64: {args.input}")
        sys.exit(1)
    print(decoded_size)


def handle_embed(args: argparse.Namespace) -> None:
    process_embed(args.input, args.payload, args.name, args.output)


def handle_extract(args: argparse.Namespace) -> None:
    process_extract(args.input, args.name, args.output)


def handle_list(args: argparse.Namespace) -> None:
    for name, decoded_size in list_payloads(read_document(args.input)):
        print(f"{name}\t{decoded_size}")


def get_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.set_defaults(func=lambda x: parser.print_help())
    subparsers = parser.add_subparsers()

    subparser = subparsers.add_parser("encode", help="encode a binary file to base64 text")
    subparser.set_defaults(func=handle_encode)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input binary file")
    opt("-o", "--output", required=True, help="output text file")

    subparser = subparsers.add_parser("decode", help="decode a base64 text file")
    subparser.set_defaults(func=handle_decode)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input text file")
    opt("-o", "--output", required=True, help="output binary file")

    subparser = subparsers.add_parser(
        "validate", help="print the decoded size of a base64 text file"
    )
    subparser.set_defaults(func=handle_validate)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input text file")

    subparser = subparsers.add_parser("embed", help="store a binary file in an xml document")
    subparser.set_defaults(func=handle_embed)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input document (.xml, .xml.gz or .xml.xz)")
    opt("-p", "--payload", required=True, help="binary file to embed")
    opt("-n", "--name", required=True, help="payload name")
    opt("-o", "--output", required=True, help="output document")

    subparser = subparsers.add_parser("extract", help="write a payload back to a binary file")
    subparser.set_defaults(func=handle_extract)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input document")
    opt("-n", "--name", required=True, help="payload name")
    opt("-o", "--output", required=True, help="output binary file")

    subparser = subparsers.add_parser("list", help="list payloads in a document")
    subparser.set_defaults(func=handle_list)
    opt = subparser.add_argument
    opt("-i", "--input", required=True, help="input document")

    args = parser.parse_args(argv)
    return args


def main(argv: list[str] | None = None) -> None:
    args = get_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()

import io

import pytest
from PIL import Image


@pytest.fixture
def oversized_jpeg():
    """Small JPEG whose SOF0 header claims 65520x65520 pixels."""
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (90, 90, 90)).save(buf, format="JPEG")
    data = bytearray(buf.getvalue())
    sof = data.index(b"\xff\xc0")
    # marker(2) length(2) precision(1) height(2) width(2)
    data[sof + 5:sof + 9] = (65520).to_bytes(2, "big") * 2
    return bytes(data)

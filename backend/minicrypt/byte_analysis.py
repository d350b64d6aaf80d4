import io
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from PIL import Image, UnidentifiedImageError

from .affine_engine import JPEG_SIGNATURE


class ByteAnalysis:
    """
    Statistics that show why byte-substitution ciphers are weak: the
    ciphertext histogram is a permutation of the plaintext one, so entropy
    does not move at all.
    """

    def _as_array(self, data: bytes) -> np.ndarray:
        return np.frombuffer(bytes(data), dtype=np.uint8)

    def histogram(self, data: bytes) -> List[int]:
        return np.bincount(self._as_array(data), minlength=256).tolist()

    def entropy(self, data: bytes) -> float:
        """Shannon entropy in bits per byte"""
        arr = self._as_array(data)
        if arr.size == 0:
            return 0.0
        counts = np.bincount(arr, minlength=256)
        p = counts[counts > 0] / arr.size
        return float(-np.sum(p * np.log2(p)))

    def npcr(self, original: bytes, encrypted: bytes) -> float:
        """Number of (byte) Positions Change Rate, in percent"""
        a = self._as_array(original)
        b = self._as_array(encrypted)
        if a.shape != b.shape or a.size == 0:
            return 0.0
        diff = np.where(a != b, 1, 0)
        return float(np.sum(diff) / a.size * 100)

    def compare(self, original: bytes, encrypted: bytes) -> Dict:
        return {
            "original_entropy": self.entropy(original),
            "encrypted_entropy": self.entropy(encrypted),
            "npcr": self.npcr(original, encrypted),
            "original_histogram": self.histogram(original),
            "encrypted_histogram": self.histogram(encrypted),
        }

    def frequency_table(self, original: bytes, encrypted: bytes) -> pd.DataFrame:
        df = pd.DataFrame({
            "byte": range(256),
            "plaintext_count": self.histogram(original),
            "ciphertext_count": self.histogram(encrypted),
        })
        df.insert(1, "hex", df["byte"].map(lambda x: f"{x:02X}"))
        return df

    def export_excel(self, original: bytes, encrypted: bytes) -> bytes:
        metrics = {
            "original_entropy": self.entropy(original),
            "encrypted_entropy": self.entropy(encrypted),
            "npcr": self.npcr(original, encrypted),
        }
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            self.frequency_table(original, encrypted).to_excel(writer, sheet_name='Frequencies', index=False)
            df_metrics = pd.DataFrame(list(metrics.items()), columns=['Metric', 'Value'])
            df_metrics.to_excel(writer, sheet_name='Metrics', index=False)
        return output.getvalue()

    # --- JPEG CHECKS (attack output sanity) ---

    def looks_like_jpeg(self, data: bytes) -> bool:
        return tuple(data[:2]) == JPEG_SIGNATURE

    def describe_image(self, data: bytes) -> Optional[Dict]:
        """Decode with Pillow; None when the bytes are not a readable image."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return {"format": img.format, "width": img.width, "height": img.height}
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
            return None


byte_analysis = ByteAnalysis()

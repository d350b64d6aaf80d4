from pydantic import BaseModel
from typing import List

class AffineEncryptRequest(BaseModel):
    plaintext: str
    a: int
    b: int

class AffineDecryptRequest(BaseModel):
    ciphertext: str # hex
    a: int
    b: int

class AffineAttackRequest(BaseModel):
    ciphertext: str # hex

class AffineAttackResult(BaseModel):
    plaintext_hex: str
    a: int
    b: int
    looks_like_jpeg: bool

class MiniDESEncryptRequest(BaseModel):
    plaintext: str
    key: str # 3 hex digits, e.g. "AE3"

class MiniDESDecryptRequest(BaseModel):
    ciphertext: str # hex
    key: str

class KeyScheduleResult(BaseModel):
    key: str
    round_keys: List[str]

class AnalysisRequest(BaseModel):
    original: str # hex
    encrypted: str # hex

class AnalysisResult(BaseModel):
    original_entropy: float
    encrypted_entropy: float
    npcr: float
    original_histogram: List[int]
    encrypted_histogram: List[int]

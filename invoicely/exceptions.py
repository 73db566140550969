"""
Fatura editoru hata tipleri.

Dogrulama hatalari (InvoiceValidationError ailesi) islemi tamamen iptal eder,
fatura taslagi islem oncesindeki haliyle kalir. main.py bunlari HTTP 400'e cevirir.
"""


class InvoiceValidationError(ValueError):
    """Kullaniciya aynen gosterilecek dogrulama hatasi."""

    def __init__(self, message: str, row: int | None = None, column: str | None = None):
        super().__init__(message)
        self.message = message
        self.row = row
        self.column = column

    def to_dict(self) -> dict:
        return {"detail": self.message, "row": self.row, "column": self.column}


class ItemImportError(InvoiceValidationError):
    """Toplu kalem aktariminda gecersiz baslik veya satir."""


class InsufficientStockError(InvoiceValidationError):
    """Katalogdan istenen miktar mevcut stogu asiyor."""


class LineItemNotFoundError(InvoiceValidationError):
    """Taslakta olmayan bir kalem id'si."""


class ExportError(Exception):
    """PDF olusturma basarisiz oldu (render hatasi)."""

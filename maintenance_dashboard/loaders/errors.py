"""Import failures reported to the front end.

Each one leaves the dashboard state untouched; the caller decides how to
surface the message.
"""


class ImportFailure(ValueError):
    """Base class for rejected imports."""


class MissingHeadersError(ImportFailure):
    def __init__(self, missing: list[str], required: list[str]):
        self.missing = list(missing)
        self.required = list(required)
        super().__init__(
            "El CSV no tiene todos los encabezados requeridos. "
            f"Requeridos: {', '.join(self.required)}. "
            f"Faltan: {', '.join(self.missing)}."
        )


class EmptyCsvError(ImportFailure):
    def __init__(self):
        super().__init__("CSV sin datos")


class NoValidRowsError(ImportFailure):
    def __init__(self):
        super().__init__("No se encontraron filas válidas en el CSV.")


class InvalidSnapshotError(ImportFailure):
    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__("Archivo inválido" + (f": {reason}" if reason else ""))


class InvalidWorkbookError(ImportFailure):
    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__("Planilla inválida" + (f": {reason}" if reason else ""))

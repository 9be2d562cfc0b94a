from evidex.tui.screens.document_viewer import DocumentViewerScreen, TerminalSurface

__all__ = [
    "DocumentViewerScreen",
    "TerminalSurface",
]

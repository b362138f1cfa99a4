"""Desktop/mobile GUI built with PySide6/Qt.

:mod:`main_window` holds the single Start screen with its progress bar and
dialogs, :mod:`sweep_controller` drives the core sweep from a Qt timer and
pushes the upload onto a worker thread, and :mod:`application` owns argument
parsing and the Qt event loop.
"""

"""GUI package - interactive ipywidgets viewer for .zmes files.

Tabs:
1. File: load a .zmes file, pick a record, browse its parameter tree and parser warnings
2. Plot: size distributions of the selected record (dependent variable vs. particle diameter)

Entry point:
    from zmes_parser.gui.app import build_gui
    gui = build_gui()
"""

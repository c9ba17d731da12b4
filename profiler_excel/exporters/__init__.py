"""
Writers and renderers for flattened profile rows.
"""

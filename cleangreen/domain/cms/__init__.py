"""CMS domain - editable site copy grouped by section, section visibility and assets"""

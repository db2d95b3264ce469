"""Message templates.

Each template is a renderer object with ``template_name()`` and a pure
``render(params)``.  Coordinators receive a :class:`TemplateRegistry`
rather than looking templates up in a global table.
"""

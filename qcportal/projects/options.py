"""
Project dropdown options.

A project option is the value/label pair the UI shows in project pickers:
    {"value": planningId, "label": "<projectNo> - <product|projectName|Project>",
     "projectName": ..., "product": ..., "projectNo": ...}

Kept free of Django imports; the API client builds the same options offline.
"""

PLACEHOLDER_OPTION = {'value': 0, 'label': 'Select a project'}


def product_name(product):
    """Product as a display string; accepts a serialized product or a plain name"""
    if isinstance(product, dict):
        return product.get('productName') or ''
    return product or ''


def option_label(project):
    product = product_name(project.get('product'))
    return f"{project.get('projectNo')} - {product or project.get('projectName') or 'Project'}"


def make_option(project):
    """Option for a serialized planning; value is always the planningId"""
    return {
        'value': project.get('planningId'),
        'label': option_label(project),
        'projectName': project.get('projectName'),
        'product': product_name(project.get('product')) or None,
        'projectNo': project.get('projectNo'),
    }


def with_placeholder(options):
    """Placeholder followed by the options sorted by label"""
    return [dict(PLACEHOLDER_OPTION)] + sorted(options, key=lambda option: option['label'].casefold())

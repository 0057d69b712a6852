from django import template
from django.utils.safestring import mark_safe

from reconciliation.banner import ReconciliationSummary, render_reconciliation_banner


register = template.Library()


@register.simple_tag
def reconciliation_banner(title, description, control_balance, subledger_balance, details_href, difference=None):
    """
    {% reconciliation_banner "AR reconciliation" "Control vs customer balances." ar_control ar_total "/staff/reconciliation?type=ar" %}
    """
    summary = ReconciliationSummary(control_balance, subledger_balance, difference)
    # The banner template autoescapes its inputs.
    return mark_safe(render_reconciliation_banner(title, description, summary, details_href))

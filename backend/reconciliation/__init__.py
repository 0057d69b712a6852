"""
Reconciliation banner: flags a control account that disagrees with the
sum of its subledger.
"""

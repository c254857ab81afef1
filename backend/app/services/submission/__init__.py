"""
Submission: coercion, row filters, row builders, asset storage and the
translator that writes a wizard form to the datastore.
"""

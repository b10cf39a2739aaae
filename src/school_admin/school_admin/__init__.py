"""School administration package.

Organized by feature modules (pricing, payments, enrollments, receipts, ...)
with a thin Flask JSON controller layer over service/repository layers.
"""

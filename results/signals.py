from django.dispatch import Signal

# Sent after results are marked published, with ``publication`` (a
# ResultPublication). Notification senders connect here.
results_published = Signal()

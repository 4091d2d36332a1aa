from django.db import models


# ---------- Named counters ----------
# One row per sequence, e.g. "billId"
class Counter(models.Model):
    name = models.CharField(max_length=64, primary_key=True)
    # Last value handed out, 0 means nothing issued yet
    seq = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.name}: {self.seq}"

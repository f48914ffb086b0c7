from django.db import models
from django.conf import settings
from .company import Company


class CompanyFollow(models.Model):
    """
    A person following a company.

    No approval step and no status: the row existing is the follow. A person
    can follow a company at most once (enforced via 'unique_together').
    """
    class Meta:
        unique_together = ('person', 'company')

    person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='company_follows',
        on_delete=models.CASCADE,
    )
    company = models.ForeignKey(
        Company,
        related_name='follows',
        on_delete=models.CASCADE,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.person} follows {self.company}"

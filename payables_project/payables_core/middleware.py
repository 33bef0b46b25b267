from django.utils.deprecation import MiddlewareMixin
from .models import Company


class CurrentCompanyMiddleware(MiddlewareMixin):
    # Attach a .company attribute to the request for tenant-scoped admin pages
    def process_request(self, request):
        request.company = None
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return

        # Staff pick the company they work in, stored in the session
        company_id = request.session.get("active_company_id")
        if company_id:
            request.company = Company.objects.filter(pk=company_id).first()

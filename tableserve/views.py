from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from .authentication import BearerTokenAuthentication


class PublicAPIView(APIView):
    """
    Endpoint open to customers and to anyone logging in.

    No credentials are read from the request, so a stale token in a browser
    never blocks a public page. A wrong table code or password still answers
    401 with a Bearer challenge.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get_authenticate_header(self, request):
        return BearerTokenAuthentication.keyword

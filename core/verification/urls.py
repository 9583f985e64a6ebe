from django.urls import path
from .views import (
    SendEmailOTPView,
    VerifyEmailOTPView,
    SubmitIdentityDocumentView,
)

urlpatterns = [
    path('user/send-email-otp/', SendEmailOTPView.as_view(), name='send_email_otp'),
    path('user/verify-email-otp/', VerifyEmailOTPView.as_view(), name='verify_email_otp'),
    path(
        'user/submit-verification/',
        SubmitIdentityDocumentView.as_view(),
        name='submit_verification',
    ),
]

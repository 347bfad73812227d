"""
Service d'intégration NOWPayments pour Pexry
Création de factures crypto et vérification des notifications IPN
Documentation: https://documenter.getpostman.com/view/7907941/2s93JusNJt
"""
import hashlib
import hmac
import json
import logging
import uuid
from decimal import Decimal
from typing import Dict, Optional

import requests
from django.conf import settings

from project.exceptions import ServiceError

logger = logging.getLogger(__name__)


class PaymentProviderError(ServiceError):
    """Réponse invalide ou erreur réseau du prestataire de paiement"""
    status_code = 500
    default_message = 'Failed to create NowPayments invoice'


class PaymentProviderTimeout(PaymentProviderError):
    """Le prestataire n'a pas répondu dans le délai configuré"""
    status_code = 504
    default_message = 'Payment provider timed out'


class NowPaymentsService:
    """
    Client de l'API NOWPayments
    La configuration est relue à chaque appel pour suivre les settings courants
    """

    INVOICE_ENDPOINT = '/v1/invoice'

    @property
    def api_key(self):
        return getattr(settings, 'NOWPAYMENTS_API_KEY', '')

    @property
    def ipn_secret(self):
        return getattr(settings, 'NOWPAYMENTS_IPN_SECRET', '')

    @property
    def base_url(self):
        return getattr(settings, 'NOWPAYMENTS_BASE_URL', 'https://api.nowpayments.io').rstrip('/')

    @property
    def bypass_api(self):
        return getattr(settings, 'NOWPAYMENTS_BYPASS_API', False)

    @property
    def timeout(self):
        return getattr(settings, 'NOWPAYMENTS_TIMEOUT', 30)

    def _get_headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'x-api-key': self.api_key,
        }

    def _post(self, endpoint: str, data: Dict) -> Dict:
        """
        Envoie une requête POST à l'API NOWPayments

        Returns:
            Le corps JSON décodé

        Raises:
            PaymentProviderTimeout: délai dépassé
            PaymentProviderError: erreur HTTP, réseau ou JSON
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.post(url, headers=self._get_headers(), json=data, timeout=self.timeout)
            response.raise_for_status()
            response_data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"NOWPayments POST {endpoint} - Timeout after {self.timeout}s: {str(e)}")
            raise PaymentProviderTimeout()
        except requests.exceptions.RequestException as e:
            status_code = getattr(e.response, 'status_code', None)
            logger.error(f"NOWPayments POST {endpoint} - Error ({status_code}): {str(e)}")
            raise PaymentProviderError()
        except ValueError as e:
            logger.error(f"NOWPayments response JSON decode error: {str(e)}")
            raise PaymentProviderError()

        logger.info(f"NOWPayments POST {endpoint} - Success")
        return response_data

    def create_invoice(
        self,
        amount: Decimal,
        order_id: str,
        currency: Optional[str] = None,
        description: Optional[str] = None,
        ipn_callback_url: Optional[str] = None,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> Dict:
        """
        Crée une facture NOWPayments

        Args:
            amount: Montant à payer
            order_id: Identifiant de corrélation (Order.transaction_id)
            currency: Devise du prix (usd par défaut)

        Returns:
            Les données de la facture, dont invoice_url
        """
        data = {
            'price_amount': float(amount),
            'price_currency': (currency or getattr(settings, 'NOWPAYMENTS_CURRENCY', 'usd')).lower(),
            'order_id': str(order_id),
        }
        if description:
            data['order_description'] = description
        if ipn_callback_url:
            data['ipn_callback_url'] = ipn_callback_url
        if success_url:
            data['success_url'] = success_url
        if cancel_url:
            data['cancel_url'] = cancel_url

        # Mode bypass pour les tests et le développement local
        if self.bypass_api:
            logger.info(f"NOWPayments API BYPASS MODE - POST {self.INVOICE_ENDPOINT}")
            invoice_id = uuid.uuid4().hex[:12]
            return {
                'id': invoice_id,
                'order_id': data['order_id'],
                'price_amount': data['price_amount'],
                'price_currency': data['price_currency'],
                'invoice_url': f"{self.base_url}/payment/?iid={invoice_id}",
            }

        if not self.api_key:
            logger.warning("NOWPayments API key not configured")

        return self._post(self.INVOICE_ENDPOINT, data)

    @staticmethod
    def _sign(payload: Dict, secret: str) -> str:
        sorted_data = json.dumps(payload, sort_keys=True, separators=(',', ':'))
        return hmac.new(
            secret.encode('utf-8'),
            sorted_data.encode('utf-8'),
            hashlib.sha512
        ).hexdigest()

    def verify_ipn_signature(self, payload: Dict, signature: str) -> bool:
        """
        Vérifie l'en-tête x-nowpayments-sig d'une notification IPN
        (HMAC-SHA512 du JSON trié par clés, signé avec le secret IPN)
        """
        if not self.ipn_secret or not signature:
            return False
        expected_signature = self._sign(payload, self.ipn_secret)
        return hmac.compare_digest(expected_signature, signature)


# Instance globale du service
nowpayments_service = NowPaymentsService()

# marketplace/models/__init__.py
from marketplace.models.user_models import User, Otp
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.models.product_models import Product
from marketplace.models.bargain_models import BargainOffer, OfferStatus
from marketplace.models.order_models import Order, OrderStatus, PaymentMethod
from marketplace.models.settings_models import PlatformSetting
from marketplace.models.activity_models import UserActivity

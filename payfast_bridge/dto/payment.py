from pydantic import BaseModel, ConfigDict, Field


class CustomerDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str | None = None
    email: str | None = None
    phone: str | None = None


class PaymentCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    # Left loosely typed so the builder reports missing or unparseable amounts itself.
    amount: str | float | int | None = None
    item_name: str | None = Field(default=None, alias="itemName")
    customer_name: str | None = Field(default=None, alias="customerName")
    customer_email: str | None = Field(default=None, alias="customerEmail")
    customer_phone: str | None = Field(default=None, alias="customerPhone")

    def customer(self) -> CustomerDetails:
        return CustomerDetails(name=self.customer_name, email=self.customer_email, phone=self.customer_phone)


class PaymentRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    merchant_order_id: str
    fields: dict[str, str]
    submission_url: str
    redirect_url: str


class PaymentCreateOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: dict[str, str]
    payfast_url: str = Field(alias="payfastUrl")
    redirect_url: str = Field(alias="redirectUrl")


class PaymentErrorOut(BaseModel):
    success: bool = False
    error: str
    field: str | None = None
